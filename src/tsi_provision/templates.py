"""Renderers for every file the run writes to the host.

Generates:
- Prometheus systemd unit
- Nginx TLS snippets (certificate paths, hardened SSL parameters)
- Nginx site proxying HTTPS traffic to Prometheus
"""

from tsi_provision.config import ProvisionSettings

SSL_CIPHERS = (
    "ECDHE-ECDSA-AES256-GCM-SHA384:ECDHE-RSA-AES256-GCM-SHA384:"
    "ECDHE-ECDSA-CHACHA20-POLY1305:ECDHE-RSA-CHACHA20-POLY1305:"
    "ECDHE-ECDSA-AES128-GCM-SHA256:ECDHE-RSA-AES128-GCM-SHA256"
)


def render_prometheus_config(settings: ProvisionSettings) -> str:
    """prometheus.yml as declared in the settings."""
    return settings.prometheus_config


def render_prometheus_unit(settings: ProvisionSettings) -> str:
    """systemd unit running Prometheus as its own system user."""
    return f"""\
[Unit]
Description=Prometheus
Wants=network-online.target
After=network-online.target

[Service]
User={settings.prometheus_user}
Group={settings.prometheus_group}
Type=simple
ExecStart=/usr/local/bin/prometheus \\
  --config.file {settings.prometheus_dir}/prometheus.yml \\
  --storage.tsdb.path {settings.prometheus_data_dir}

[Install]
WantedBy=multi-user.target
"""


def render_self_signed_snippet(settings: ProvisionSettings) -> str:
    """Nginx snippet pointing at the self-signed certificate pair."""
    return f"""\
ssl_certificate {settings.cert_path};
ssl_certificate_key {settings.key_path};
"""


def render_ssl_params_snippet(settings: ProvisionSettings) -> str:
    """Nginx snippet with protocol, cipher and header hardening."""
    return f"""\
ssl_protocols TLSv1.2 TLSv1.3;
ssl_prefer_server_ciphers on;
ssl_dhparam {settings.dhparam_path};
ssl_ciphers '{SSL_CIPHERS}';
ssl_ecdh_curve secp384r1;
ssl_session_timeout  10m;
ssl_session_cache shared:SSL:10m;
ssl_stapling on;
ssl_stapling_verify on;
resolver 8.8.8.8 8.8.4.4 valid=300s;
resolver_timeout 5s;
add_header X-Content-Type-Options nosniff;
add_header X-Frame-Options DENY;
add_header X-XSS-Protection "1; mode=block";
"""


def render_nginx_site(settings: ProvisionSettings) -> str:
    """Site redirecting HTTP to HTTPS and proxying HTTPS to Prometheus."""
    return f"""\
server {{
    listen 80;
    server_name {settings.server_name};
    return 301 https://$host$request_uri;
}}

server {{
    listen 443 ssl;
    server_name {settings.server_name};

    include snippets/self-signed.conf;
    include snippets/ssl-params.conf;

    location / {{
        proxy_pass http://localhost:{settings.prometheus_port};
        proxy_set_header Host $host;
        proxy_set_header X-Real-IP $remote_addr;
        proxy_set_header X-Forwarded-For $proxy_add_x_forwarded_for;
        proxy_set_header X-Forwarded-Proto $scheme;
    }}
}}
"""


RENDERERS = {
    "prometheus.yml": render_prometheus_config,
    "prometheus.service": render_prometheus_unit,
    "self-signed.conf": render_self_signed_snippet,
    "ssl-params.conf": render_ssl_params_snippet,
    "nginx-site": render_nginx_site,
}


def render(name: str, settings: ProvisionSettings) -> str:
    """Render one artifact by name."""
    try:
        renderer = RENDERERS[name]
    except KeyError:
        raise ValueError(f"Unknown template '{name}', expected one of {', '.join(RENDERERS)}") from None
    return renderer(settings)
