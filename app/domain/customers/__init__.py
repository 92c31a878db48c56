"""Customers and their running booking totals"""
