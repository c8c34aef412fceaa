"""Cross-Origin Resource Sharing policy, builder and middleware."""