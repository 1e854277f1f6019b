"""
Procurement planner source root.

Layers, innermost first:
- domain: planning records, workflow state machine, newsvendor and constraint services
- application: workflow and health use cases, pydantic DTOs
- infrastructure: CSV loaders, in-memory workflow store, Gemini gateway, reasoners
- presentation: FastAPI routers for workflows, planning context and system status
- shared: constants and structlog setup
- main: settings, DI container, app factory and CLI
"""
