"""
Execution Status Enums.

Status values for workflow executions and individual steps.
"""
from enum import Enum


class ExecutionStatus(str, Enum):
    """Workflow execution status values."""
    
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class StepStatus(str, Enum):
    """Step result status values."""
    
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"
