"""外部数据来源：节假日 API 与农历查表。"""
