"""本地存储的 SQLAlchemy 表结构。"""
