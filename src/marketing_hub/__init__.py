"""Marketing hub - recurring calendar expansion and cost/value metrics."""
