"""HTTP surface over the page scanner and field locator."""
