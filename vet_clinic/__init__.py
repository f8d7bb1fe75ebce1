"""动物医院周期护理提醒：驱虫、定期服务与疫苗的到期日计算和登记。"""
__version__ = "0.1.0"
