"""基础设施层：数据库、持久化、L1 缓存。"""
