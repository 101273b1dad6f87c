"""Stellarbill: payment settlement and recurring billing engine for Stellar merchants."""
