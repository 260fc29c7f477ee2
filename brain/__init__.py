# Brain module - action generators that drive the flat-world agent
from .contracts import ActionProposal
