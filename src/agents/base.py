from __future__ import annotations

import logging


class AgentBase:
    name = "agent"

    @property
    def logger(self) -> logging.Logger:
        return logging.getLogger(f"agents.{self.name}")
