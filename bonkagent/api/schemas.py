"""Request and response bodies. JSON keys are camelCase on the wire."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from bonkagent.tasks.models import TaskView
from bonkagent.wallet.models import TokenAccount, WalletSnapshot


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Requests ---


class CreateTaskRequest(ApiModel):
    task: str | None = None
    wallet_address: str | None = None
    allowed_domains: list[str] = Field(default_factory=list)
    structured_output_json: Any = None
    llm_model: str | None = None


class DisconnectRequest(ApiModel):
    message: str | None = None
    source: str | None = None


class WatchWalletRequest(ApiModel):
    address: str


class RunBrowserbaseTaskRequest(ApiModel):
    task: str | None = None
    start_url: str | None = None
    llm_model: str | None = None


# --- Responses ---


class HealthResponse(ApiModel):
    status: str
    timestamp: datetime


class AuthStatusResponse(ApiModel):
    keys_configured: dict[str, bool]


class TaskStepOut(ApiModel):
    action: str
    details: str | None = None
    url: str | None = None
    timestamp: str
    screenshot: str | None = None


class TaskViewOut(ApiModel):
    task_id: str | None = None
    status: str
    progress: float
    steps: list[TaskStepOut] = Field(default_factory=list)
    output: Any = None
    live_url: str | None = None
    error: str | None = None

    @classmethod
    def from_view(cls, view: TaskView) -> "TaskViewOut":
        return cls.model_validate(view.to_dict())


class TokenAccountOut(ApiModel):
    address: str
    mint: str
    owner: str
    amount: float
    decimals: int
    ui_amount_string: str

    @classmethod
    def from_account(cls, account: TokenAccount) -> "TokenAccountOut":
        return cls.model_validate(account.model_dump())


class BalanceResponse(ApiModel):
    address: str
    balance: float


class TokensResponse(ApiModel):
    address: str
    tokens: list[TokenAccountOut]


class EmptyAccountsResponse(ApiModel):
    address: str
    empty_accounts: list[TokenAccountOut]
    count: int
    reclaimable_sol: float


class BonkBalanceResponse(ApiModel):
    address: str
    bonk_balance: float


class WalletSnapshotOut(ApiModel):
    address: str
    sol_balance: float
    bonk_balance: float
    token_accounts: list[TokenAccountOut]
    empty_accounts: list[TokenAccountOut]
    reclaimable_sol: float
    fetched_at: datetime

    @classmethod
    def from_snapshot(cls, snapshot: WalletSnapshot) -> "WalletSnapshotOut":
        return cls(
            address=snapshot.address,
            sol_balance=snapshot.sol_balance,
            bonk_balance=snapshot.bonk_balance,
            token_accounts=[TokenAccountOut.from_account(a) for a in snapshot.token_accounts],
            empty_accounts=[TokenAccountOut.from_account(a) for a in snapshot.empty_accounts],
            reclaimable_sol=snapshot.reclaimable_sol,
            fetched_at=snapshot.fetched_at,
        )


class WatchedWalletResponse(ApiModel):
    address: str | None = None
    snapshot: WalletSnapshotOut | None = None
    error: str | None = None


class RunStepOut(ApiModel):
    action: str
    details: str | None = None
    url: str | None = None
    ok: bool
    timestamp: str


class BrowserbaseTaskResponse(ApiModel):
    session_id: str
    steps: list[RunStepOut] = Field(default_factory=list)
    output: Any = None
    live_url: str | None = None
    completed: bool
