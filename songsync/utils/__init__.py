"""工具模块 - 配置与日志"""
