"""Workforce Tracker package.

Feature modules (employees, attendance, activities, leaves, ...) follow the same
layout: a frozen dataclass model, a repository Protocol with a MySQL
implementation, a service holding the business rules and a thin Flask
controller.
"""
