"""Built-in default rule document and starter .automerge.yml template."""

from __future__ import annotations

from typing import Any, Dict

CONFIG_FILENAME = ".automerge.yml"

DEFAULT_DOCUMENT: Dict[str, Any] = {
    "version": "1",
    "rules": [
        {
            "name": "Auto-merge dependabot",
            "description": "Automatically merge dependabot PRs",
            "enabled": True,
            "conditions": {
                "authorPatterns": ["dependabot[bot]"],
                "maxRiskScore": 0.3,
            },
            "actions": {
                "autoApprove": True,
                "autoMerge": True,
                "mergeMethod": "squash",
                "deleteBranch": True,
            },
        }
    ],
    "settings": {
        "aiAnalysis": False,
        "riskThreshold": 0.5,
        "autoDeleteBranches": True,
        "requireStatusChecks": True,
        "gateFailureMode": "open",
        "settleSeconds": 2.0,
    },
}

STARTER_YAML = """\
# Automerge configuration
# Rules are checked top to bottom; the first enabled rule whose conditions
# all hold decides. When no rule matches, built-in heuristics apply
# (documentation-only, small config changes, test-only, minor dependencies).
version: "1"

rules:
  - name: Auto-merge dependabot
    description: Automatically merge dependabot PRs
    enabled: true              # rules are disabled unless enabled: true
    conditions:
      authorPatterns: ["dependabot[bot]"]
      maxRiskScore: 0.3        # only checked when a risk assessment exists
    actions:
      autoApprove: true
      autoMerge: true
      mergeMethod: squash      # merge | squash | rebase
      deleteBranch: true

  # - name: Docs from the docs team
  #   enabled: true
  #   conditions:
  #     authorPatterns: ["docs-*"]
  #     filePatterns: ["docs/**", "*.md"]
  #     blockPatterns: ["src/**"]
  #   actions:
  #     autoMerge: true
  #     mergeMethod: rebase

settings:
  aiAnalysis: false
  riskThreshold: 0.5
  autoDeleteBranches: true
  requireStatusChecks: true
  gateFailureMode: open        # open | closed: outcome when a gate query errors
  settleSeconds: 2.0           # upper bound on waiting for an approval to show up
"""
