"""Business logic services.

Services contain all classification and aggregation logic and are called
by routes. View services accept their store and reference day explicitly
so they can be exercised with fixed dates and in-memory fakes.
"""
