"""Academy Register package.

Organised by feature modules (classes, sessions, enrollment, registers)
with a thin Flask controller layer over service/repository layers.
"""
