"""Services Layer — request execution pipeline and the public item service.

Invariants:
    - Every operation funnels through ServiceRequestBase.emit()
"""
