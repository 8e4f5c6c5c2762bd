"""
Generators — produce the files of a new application.

Each generator module exposes a ``generate_*()`` function that returns
``GeneratedFile`` instances. Generators are pure: they never touch disk.
"""
