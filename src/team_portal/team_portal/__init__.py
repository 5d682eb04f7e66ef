"""Team Portal package.

Feature modules (employees, teams, attendance, tasks, leaves, notes, reports,
uploads, performance) each carry a model, a repository interface with a MySQL
implementation, a service layer and a thin Flask JSON controller.
"""
