"""Réservation de terrain (padel / pickleball) et réconciliation des paiements Razorpay."""

__version__ = "0.1.0"
