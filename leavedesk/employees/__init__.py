"""Employees module — Employee model, schemas and services."""

from leavedesk.employees.models import Employee

__all__ = ["Employee"]
