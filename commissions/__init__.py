"""commissions 模块 - 提成计算流水线

数据流：
    预约列表 ──→ projection ──→ 提成工作集 ──→ filtering ──→ 过滤结果 + 合计
                                    ↑                              │
                        reconciler（本地修改 + 补丁）            report（打印）

子模块：
- locale_number: 巴西本地化数字解析/格式化与输入掩码
- projection: 已完成预约 -> 提成行
- filtering: 文本/日期/支付状态过滤与汇总
- reconciler: 单行修改、支付状态、清除提成，输出最小补丁
- board: 单个会话的工作集
- report: 打印报表

本包所有函数均为纯函数，不访问数据库。
"""
