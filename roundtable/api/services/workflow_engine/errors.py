"""Configuration errors raised inside step handlers and turned into failure outcomes."""


class WorkflowStepError(Exception):
    """Base class for errors that fail the current step only."""


class AgentNotFoundError(WorkflowStepError):
    def __init__(self, agent_id: str):
        super().__init__(f"Agent not found in execution context: {agent_id}")
        self.agent_id = agent_id


class OutputStyleNotFoundError(WorkflowStepError):
    def __init__(self, style_id: str, agent_name: str = ""):
        suffix = f" (agent: {agent_name})" if agent_name else ""
        super().__init__(f"Output style not found: {style_id}{suffix}")
        self.style_id = style_id


class SummaryAgentNotConfiguredError(WorkflowStepError):
    def __init__(self):
        super().__init__("No summary agent configured for meeting or summary step")


class UnknownStepTypeError(WorkflowStepError):
    def __init__(self, step_type):
        super().__init__(f"Unknown step type: {step_type}")
        self.step_type = step_type
