"""Activity log domain - audit trail of operator actions"""
