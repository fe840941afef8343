"""Pydantic schema for the admin dashboard counters."""

from pydantic import BaseModel, Field


class DashboardStats(BaseModel):
    total_users: int
    total_files: int
    total_storage_gb: float = Field(description="Sum of attachment sizes in GB, 2 decimals")
    today_activities: int
