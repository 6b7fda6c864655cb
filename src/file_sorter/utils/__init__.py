"""
Supporting utilities: configuration, error taxonomy, reporting and scheduling.
"""
