"""
Orchestrator Module
Modular, single-responsibility components of a test batch run
"""

from src.orchestrator.batch_orchestrator import TestBatchOrchestrator, load_sentences
from src.orchestrator.dispatch_planner import DispatchPlan, DispatchPlanner, DispatchStep
from src.orchestrator.polling_engine import PollingEngine
from src.orchestrator.resource_provisioner import ResourceProvisioner
from src.orchestrator.result_correlator import ResultCorrelator
from src.orchestrator.result_formatter import ResultFormatter
from src.orchestrator.session_coordinator import SessionCoordinator
from src.orchestrator.validation_orchestrator import ValidationOrchestrator

__all__ = [
    "TestBatchOrchestrator",
    "load_sentences",
    "DispatchPlan",
    "DispatchPlanner",
    "DispatchStep",
    "PollingEngine",
    "ResourceProvisioner",
    "ResultCorrelator",
    "ResultFormatter",
    "SessionCoordinator",
    "ValidationOrchestrator",
]
