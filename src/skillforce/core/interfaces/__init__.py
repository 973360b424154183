from skillforce.core.interfaces.planning import PlanningEngineProtocol
from skillforce.core.interfaces.skills import SkillCatalogProtocol, SkillExecutorProtocol
from skillforce.core.interfaces.understanding import UnderstandingEngineProtocol

__all__ = [
    "PlanningEngineProtocol",
    "SkillCatalogProtocol",
    "SkillExecutorProtocol",
    "UnderstandingEngineProtocol",
]
