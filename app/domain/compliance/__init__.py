"""Tender agreements and their tax installment schedules"""
