"""Kernel binding and result persistence for hinf_synthesis."""
