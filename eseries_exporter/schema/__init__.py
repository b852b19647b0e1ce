"""
Schema package: typed records decoded from SANtricity API responses.
"""
