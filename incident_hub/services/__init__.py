"""
Services layer - business logic lives here, routes stay thin.

- jurisdiction_catalog / location_resolver: where a citizen is
- incident_feed / incident_filters: what they see
- incident_service / analytics_service: what citizens and staff change
- voice: transcript classification for voice reports
"""
