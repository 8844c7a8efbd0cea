"""核心模块 - 数据模型、接口与异常定义"""
