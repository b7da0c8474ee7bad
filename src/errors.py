from __future__ import annotations


class SampleIndexError(Exception):
    "Βασική κλάση για όλα τα σφάλματα του sample index."


class ValidationError(SampleIndexError, ValueError):
    "Λάθος δεδομένα εισόδου (αρχείο, κριτήρια, τελεστές, query)."


class DuplicateError(SampleIndexError, ValueError):
    "Σημείο με τις ίδιες συντεταγμένες υπάρχει ήδη στο δείγμα."


class StateError(SampleIndexError, RuntimeError):
    "Η λειτουργία δεν επιτρέπεται στην τρέχουσα κατάσταση (π.χ. άδειο δείγμα)."
