"""Teardown step executors.

Each operator performs one teardown step against the resource snapshot
and reports a StepResult instead of raising on ordinary failures.
"""

from cryptdown.operators.agent import CredentialAgentOperator
from cryptdown.operators.base import Operator
from cryptdown.operators.containers import ContainerStopOperator
from cryptdown.operators.flush import FlushOperator
from cryptdown.operators.luks import LuksCloseOperator
from cryptdown.operators.network import NetworkDownOperator
from cryptdown.operators.services import ServiceStopOperator
from cryptdown.operators.swap import SwapOperator
from cryptdown.operators.unmount import UnmountOperator

__all__ = [
    "ContainerStopOperator",
    "CredentialAgentOperator",
    "FlushOperator",
    "LuksCloseOperator",
    "NetworkDownOperator",
    "Operator",
    "ServiceStopOperator",
    "SwapOperator",
    "UnmountOperator",
]
