"""HPP Pricing Engine."""
