"""Domain layer for rulework.

Contains the rule algebra, predicate expression trees and their compiler,
workflows and the flowable chain wrapper. This package is deliberately
technology-agnostic.

Dependency rule: do not import from `rulework.adapters` or `rulework.entrypoints`.
"""
