"""Example: a dashboard whose widgets read shared variables.

The dashboard scope holds defaults, the revenue widget overrides one of them,
and every widget title follows the variables it reads.
"""

import logging

from pydantic import BaseModel

import livevars as lv

logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


class Widget(BaseModel):
    title: str | None = None
    subtitle: str | None = None


# Scopes form a tree, like sheets nested in a workbook
tree = lv.ScopeTree()
dashboard = tree.add_scope("dashboard")
revenue = tree.add_scope("revenue", parent=dashboard)
costs = tree.add_scope("costs", parent=dashboard)

events = lv.ChangeEvents(tree)
events.subscribe(dashboard, lambda scope: print(f"  changed: {scope}"))

manager = lv.VariableManager(tree, events, tree)

revenue_widget = Widget()
costs_widget = Widget()

# Bind widget properties to expressions
manager.register_reference(
    lv.PropertyLocation.for_attribute(revenue_widget, "title", revenue),
    "Revenue for ${region} (${period.label})",
)
manager.register_reference(
    lv.PropertyLocation.for_attribute(costs_widget, "title", costs),
    "Costs for ${region} (${period.label})",
)
manager.register_reference(
    lv.PropertyLocation.for_attribute(costs_widget, "subtitle", costs),
    "Currency: ${currency}",
)

print("Assign dashboard defaults")
manager.set("region", "EMEA", dashboard)
manager.set("period", {"label": "Q3"}, dashboard)
manager.set("currency", "EUR", dashboard)
print(revenue_widget)
print(costs_widget)

print("Override the region for the revenue widget only")
manager.set("region", "APAC", revenue)
print(revenue_widget)
print(costs_widget)

print("Change the period everywhere")
manager.set("period", {"label": "Q4"}, dashboard)
print(revenue_widget)
print(costs_widget)

print("Remove the costs widget")
tree.destroy(costs)
manager.set("currency", "USD", dashboard)
print(costs_widget)
