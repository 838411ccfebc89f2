from pydantic import BaseModel, Field, model_validator


class ProjectRules(BaseModel):
    slug: str
    rules_version: str

class MachineRules(BaseModel):
    debounce_ms: int = Field(default=500, ge=0)

class ServiceStatusRules(BaseModel):
    degraded_after_errors: int = Field(default=1, ge=1)
    unavailable_after_errors: int = Field(default=3, ge=1)

    @model_validator(mode="after")
    def _check_order(self) -> "ServiceStatusRules":
        if self.unavailable_after_errors < self.degraded_after_errors:
            raise ValueError("unavailable_after_errors must be >= degraded_after_errors")
        return self

class FakeServerRules(BaseModel):
    latency_ms: int = Field(default=500, ge=0)
    failure_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    seed: int | None = None
    failure_message: str = "People service unavailable"

class Rules(BaseModel):
    project: ProjectRules
    machine: MachineRules = Field(default_factory=MachineRules)
    service_status: ServiceStatusRules = Field(default_factory=ServiceStatusRules)
    fake_server: FakeServerRules = Field(default_factory=FakeServerRules)
