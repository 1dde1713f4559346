"""适配器层：外部能力（翻译引擎、大模型）与命令行入口。"""
