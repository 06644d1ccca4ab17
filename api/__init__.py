"""HTTP surface for the expense tracker."""
