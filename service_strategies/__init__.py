"""
Cache strategy service.

Hosts the strategy engine: interchangeable cache/record-store policies
sharing one operation contract.
"""
