"""
Lighthouse — Catalog
Workflows and tools loaded once at startup and passed to every engine.
Lookups return copies so callers cannot mutate catalog data.
"""
import copy
import logging

from engines import tools as tool_lib
from engines.workflows import default_workflows, find_step, validate_workflow


class Catalog:
    """Read-only workflow and tool catalog."""

    def __init__(self, workflows, tools):
        self._workflows = {}
        for wid, wf in workflows.items():
            self._workflows[wid] = validate_workflow(copy.deepcopy(wf))
        seen = set()
        for t in tools:
            if t['id'] in seen:
                raise ValueError(f"Duplicate tool id '{t['id']}'")
            seen.add(t['id'])
        self._tools = copy.deepcopy(list(tools))

    # ── Workflows ──

    def get_workflow(self, workflow_id):
        wf = self._workflows.get(workflow_id)
        return copy.deepcopy(wf) if wf is not None else None

    def get_all_workflows(self):
        return [copy.deepcopy(wf) for wf in self._workflows.values() if wf['steps']]

    def get_workflow_step(self, workflow_id, step_id):
        wf = self._workflows.get(workflow_id)
        if wf is None:
            return None
        step = find_step(wf, step_id)
        return copy.deepcopy(step) if step is not None else None

    # ── Tools ──

    def get_tools_by_category(self, category):
        return copy.deepcopy(tool_lib.tools_by_category(self._tools, category))

    def get_tool_by_id(self, tool_id):
        t = tool_lib.tool_by_id(self._tools, tool_id)
        return copy.deepcopy(t) if t is not None else None

    def get_tools_by_ids(self, ids):
        return copy.deepcopy(tool_lib.tools_by_ids(self._tools, ids))

    def get_tools_for_step_sorted(self, step_id, category, context=None, erp=None):
        return copy.deepcopy(tool_lib.rank_tools_for_step(self._tools, step_id, category, context, erp))

    def get_tool_erp_compatibility(self, tool, erp):
        return tool_lib.get_tool_erp_compatibility(tool, erp)

    def filter_tools(self, **filters):
        return copy.deepcopy(tool_lib.filter_tools(self._tools, **filters))

    def __repr__(self):
        return f'<Catalog workflows={len(self._workflows)} tools={len(self._tools)}>'


def build_catalog(workflows=None, tools=None, extra_tools=None):
    """Catalog from built-in definitions, with optional replacements and extra tools."""
    wfs = workflows if workflows is not None else default_workflows()
    tls = list(tools if tools is not None else tool_lib.TOOL_LIBRARY)
    if extra_tools:
        known = {t['id'] for t in tls}
        for t in extra_tools:
            if t['id'] in known:
                logging.warning(f"Tool '{t['id']}' from config replaces built-in definition")
                tls = [t if x['id'] == t['id'] else x for x in tls]
            else:
                tls.append(t)
                known.add(t['id'])
    catalog = Catalog(wfs, tls)
    logging.info(f'Catalog loaded: {catalog!r}')
    return catalog
