"""Tests for CORS origins and CSP generation."""

from cdk_constructs.response_headers import content_security_policy, cors_allowed_origins


class TestCorsAllowedOrigins:
    """Tests for the CORS allow-list."""

    def test_apex_and_subdomains(self):
        """Test each domain is allowed on its apex and subdomains."""
        assert cors_allowed_origins(["stelo.dev", "stelo.me"]) == [
            "https://stelo.dev",
            "https://*.stelo.dev",
            "https://stelo.me",
            "https://*.stelo.me",
        ]

    def test_https_only(self):
        """Test no plain HTTP origin is generated."""
        origins = cors_allowed_origins(["stelo.info", "stelo.app", "stelo.dev", "stelo.me"])

        assert len(origins) == 8
        assert all(origin.startswith("https://") for origin in origins)


class TestContentSecurityPolicy:
    """Tests for the CSP header value."""

    def test_sources_follow_cors(self):
        """Test the CSP lists exactly the CORS origins."""
        domains = ["stelo.info", "stelo.app"]
        csp = content_security_policy(domains)
        default_src = csp.split("; ")[0].split()

        assert default_src == ["default-src", "'self'", *cors_allowed_origins(domains)]

    def test_restrictive_directives(self):
        csp = content_security_policy(["stelo.dev"])

        assert "object-src 'none'" in csp
        assert "frame-ancestors 'self'" in csp
