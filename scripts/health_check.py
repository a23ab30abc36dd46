#!/usr/bin/env python3
"""
Health check script for the XML content JSON service.
Can be used with monitoring systems like Nagios or Zabbix.
"""

import argparse
import json
import sys
import time
from typing import Dict, Any
import requests
import logging

logging.basicConfig(level=logging.WARNING, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


class HealthChecker:
    """Health checker for the XML content JSON service."""

    def __init__(self, base_url: str = "http://localhost:8891", timeout: int = 30):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()

    def _get(self, path: str) -> requests.Response:
        response = self.session.get(f"{self.base_url}{path}", timeout=self.timeout)
        response.raise_for_status()
        return response

    def check_api_health(self) -> Dict[str, Any]:
        """Check API health endpoint."""
        try:
            response = self._get("/health")
            health_data = response.json()
            return {
                'status': 'ok',
                'response_time_ms': response.elapsed.total_seconds() * 1000,
                'api_version': health_data.get('version', 'unknown'),
                'api_status': health_data.get('status', 'unknown'),
                'timestamp': health_data.get('timestamp')
            }
        except requests.exceptions.ConnectionError:
            return {
                'status': 'error',
                'error': 'Connection refused - service may be down',
                'response_time_ms': None
            }
        except requests.exceptions.Timeout:
            return {
                'status': 'error',
                'error': f'Request timeout after {self.timeout}s',
                'response_time_ms': None
            }
        except requests.exceptions.HTTPError as e:
            return {
                'status': 'error',
                'error': f'HTTP error: {e.response.status_code}',
                'response_time_ms': None
            }
        except requests.exceptions.RequestException as e:
            return {
                'status': 'error',
                'error': f'Unexpected error: {str(e)}',
                'response_time_ms': None
            }

    def check_repository(self) -> Dict[str, Any]:
        """Check that the service can read its content repository."""
        try:
            response = self._get("/health/detailed")
            details = response.json()
            environment = details.get('environment', {})
            if details.get('status') != 'healthy':
                return {
                    'status': 'error',
                    'error': f"Content root {environment.get('content_root')} unavailable"
                }
            contents = self._get("/contents").json()
            return {
                'status': 'ok',
                'content_root': environment.get('content_root'),
                'contents_count': contents.get('total_count', 0),
                'definition_cache': details.get('performance', {}).get('definition_cache'),
            }
        except (requests.exceptions.RequestException, ValueError) as e:
            return {
                'status': 'error',
                'error': f'Repository check failed: {str(e)}'
            }

    def run_comprehensive_check(self) -> Dict[str, Any]:
        """Run all health checks and return comprehensive status."""

        start_time = time.time()

        checks = {
            'api': self.check_api_health(),
            'repository': self.check_repository(),
        }

        overall_status = 'ok'
        errors = []
        for check_name, check_result in checks.items():
            if check_result['status'] == 'error':
                overall_status = 'error'
                errors.append(f"{check_name}: {check_result.get('error', 'Unknown error')}")

        result = {
            'overall_status': overall_status,
            'check_duration_ms': round((time.time() - start_time) * 1000, 2),
            'timestamp': time.time(),
            'checks': checks
        }
        if errors:
            result['errors'] = errors
        return result


def main():
    """Main function for command-line usage."""

    parser = argparse.ArgumentParser(description='XML Content JSON Service Health Check')
    parser.add_argument(
        '--url',
        default='http://localhost:8891',
        help='Base URL for the service (default: http://localhost:8891)'
    )
    parser.add_argument(
        '--timeout',
        type=int,
        default=30,
        help='Request timeout in seconds (default: 30)'
    )
    parser.add_argument(
        '--format',
        choices=['json', 'text', 'nagios'],
        default='text',
        help='Output format (default: text)'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose output'
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    checker = HealthChecker(args.url, args.timeout)
    result = checker.run_comprehensive_check()

    if args.format == 'json':
        print(json.dumps(result, indent=2, default=str))
    elif args.format == 'nagios':
        status_code = {
            'ok': 0,
            'warning': 1,
            'error': 2
        }.get(result['overall_status'], 3)

        message = f"XML Content Service {result['overall_status'].upper()}"
        if 'errors' in result:
            message += f" - Errors: {'; '.join(result['errors'])}"

        print(message)
        sys.exit(status_code)
    else:
        print("XML Content Service Health Check")
        print(f"Overall Status: {result['overall_status'].upper()}")
        print(f"Check Duration: {result['check_duration_ms']}ms")
        print()

        for check_name, check_result in result['checks'].items():
            print(f"{check_name.title()} Check: {check_result['status'].upper()}")
            if check_result['status'] == 'error' and 'error' in check_result:
                print(f"  Error: {check_result['error']}")
            print()

        if result['overall_status'] != 'ok':
            sys.exit(1)


if __name__ == '__main__':
    main()
