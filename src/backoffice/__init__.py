"""Back-office: admin dashboard statistics and the admin-only HTTP surface."""
