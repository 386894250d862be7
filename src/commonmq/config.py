"""QueueConfig: validated, immutable client configuration."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_QUEUE = "rsmq://commonmq"


class QueueConfig(BaseModel):
    """Configuration shared by every queue client.

    Field names accept both snake_case and the camelCase spelling
    (``badMessageQueue``, ``pollIntervalMs``, ...).

    Formats:
        - ``rsmq://[host[:port]/]queueName``
        - ``sqs://region/accountId/queueName``
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="forbid",
    )

    queue: str = DEFAULT_QUEUE
    bad_message_queue: str | None = None
    poll_interval_ms: int = Field(default=1000, ge=0)
    wait_time_seconds: int = Field(
        default=0,
        ge=0,
        le=20,
        description="SQS long-poll wait per receive call; ignored by RSMQ.",
    )
    client_options: dict[str, Any] = Field(
        default_factory=dict,
        description="Keyword arguments forwarded to the backend client.",
    )

    @property
    def poll_interval(self) -> float:
        """Poll interval in seconds."""
        return self.poll_interval_ms / 1000.0

    @classmethod
    def by_field_name(cls, options: Mapping[str, Any]) -> dict[str, Any]:
        """Return *options* keyed by field name, whichever spelling was used.

        Unknown keys are kept so validation still rejects them.
        """
        names = {
            info.alias: name
            for name, info in cls.model_fields.items()
            if info.alias is not None
        }
        return {names.get(key, key): value for key, value in options.items()}

    @classmethod
    def from_options(
        cls,
        config: QueueConfig | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> QueueConfig:
        """Build a config from an existing config, a mapping and/or overrides.

        Overrides win over *config*. Either side may use snake_case or
        camelCase keys.
        """
        if isinstance(config, QueueConfig):
            if not overrides:
                return config
            data: dict[str, Any] = config.model_dump()
        else:
            data = cls.by_field_name(config or {})
        data.update(cls.by_field_name(overrides))
        return cls.model_validate(data)
