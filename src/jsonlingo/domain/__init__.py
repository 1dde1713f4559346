"""纯领域逻辑：不依赖任何 I/O。"""
