from .compiler import FlowGraph, build_flow_order, compile_flow
from .eligibility import EligibilityResolver
from .engine import IntakeFlowEngine, Progress
from .errors import FlowError, FlowLoadError, InvalidTransitionError, UnknownNodeError
from .ir import AnswerType, FlowDefinition, FlowNode, NodeKind
from .literals import UNPARSABLE, coerce, parse_literal
from .loader import default_flow_path, load_flow_definition
from .state import AnswerRecord, SessionState, ViewState
from .triggers import TriggerExpression, evaluate_trigger, parse_trigger
from .validation import validate_answer, wants_agent

__all__ = [
    "UNPARSABLE",
    "AnswerRecord",
    "AnswerType",
    "EligibilityResolver",
    "FlowDefinition",
    "FlowError",
    "FlowGraph",
    "FlowLoadError",
    "FlowNode",
    "IntakeFlowEngine",
    "InvalidTransitionError",
    "NodeKind",
    "Progress",
    "SessionState",
    "TriggerExpression",
    "UnknownNodeError",
    "ViewState",
    "build_flow_order",
    "coerce",
    "compile_flow",
    "default_flow_path",
    "evaluate_trigger",
    "load_flow_definition",
    "parse_literal",
    "parse_trigger",
    "validate_answer",
    "wants_agent",
]
