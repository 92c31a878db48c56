"""Payments received against bookings"""
