"""Budget allocation and spending aggregation engine of the Budget Tracker backend."""
