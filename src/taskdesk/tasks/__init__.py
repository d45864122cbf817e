"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskFilter, TaskDraft, EditDraft)
- task_list.py: list controller that syncs with the API after every mutation
"""
