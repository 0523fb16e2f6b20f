"""Robotics narrative index.

Packages:

- signals: decay policy, component weights and composite scoring helpers
- storage: durable sticky-signal and score-history stores
- fetchers: upstream adapters returning tagged fetch results
- scorers: the seven component scorers
- notifications: briefing/alert formatting and Telegram delivery

`narrative.aggregator.NarrativeIndex` is the entry point that runs one
aggregation cycle; `narrative.factory.build_index` wires it from config.
"""
