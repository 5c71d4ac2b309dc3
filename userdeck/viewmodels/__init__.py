"""ViewModel package for screen state and command surfaces.

Call context:
    ``userdeck/app/container.py`` builds the sessions in this package and
    screen glue binds its widgets to their callbacks.

Dependencies:
    Modules in this package depend on domain types, ports and lightweight
    formatting helpers only. Transport and persistence stay in adapters.

Responsibilities:
    - Expose mutable screen state and command intent callbacks.
    - Transform domain records into view-facing rows and labels.
    - Keep MVVM boundaries explicit by avoiding transport logic.
"""
