"""lingua-sync 命令行模块。入口见 lingua_sync.cli.main:app。"""
