"""
Task subsystem.

Components:
- task_models.py: states, policies, options, body steps (Suspend/Done) and the generator adapter
- task_instance.py: one cancellable, resumable run of a task body
- task_scheduler.py: policy engine that admits, queues, drops or restarts runs
- task_api.py: make_task() builder used by call sites
- delay.py: timeout() delay primitive (debounce, task bodies)
"""
