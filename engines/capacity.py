"""
Lighthouse — Capacity Weight Allocator
Distributes a team's capacity across workflow steps using the step's
AI opportunity impact as the weight proxy (high=3, medium=2, low=1).
"""

IMPACT_WEIGHT = {'high': 3, 'medium': 2, 'low': 1}


def calculate_capacity_weights(steps):
    """Return {stepId: fraction} summing to 1.0 over the given steps."""
    if not steps:
        return {}
    total = sum(IMPACT_WEIGHT[s['aiOpportunity']['impact']] for s in steps)
    return {s['id']: IMPACT_WEIGHT[s['aiOpportunity']['impact']] / total for s in steps}
