# services -- account manager, approval workflow, admin console, listings, API client
