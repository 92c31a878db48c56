"""Maintenance domain - repair tasks that take media units out of service"""
