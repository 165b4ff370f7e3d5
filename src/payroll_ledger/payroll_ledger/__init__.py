"""Payroll Ledger package.

Reconciles time-clock punches and admin edits into a per-employee-per-day
ledger, then aggregates that ledger into payroll and performance reports.

Organized by feature modules (attendance, payroll, requests, ...) with a thin
Flask controller layer on top of service/repository layers.
"""
