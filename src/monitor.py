"""
Drift Monitor CLI
Visits a site, profiles the hosts it pulls code and connections from, and
compares them against the authorized baseline in authorized_hosts.json.
"""

import argparse
import sys

import logger
from baseline import BaselineError, compare, load_baseline, recommend
from config import ConfigError, MonitorConfig
from github_issues import GitHubIssueTracker
from handlers import EventHandlers
from issue_lifecycle import IssueLifecycleManager
from network_capture import SiteCapture
from observations import Category, ObservationAggregator
from utils import get_timestamp, save_json


class MonitorResult:
    """Outcome of the analysis phase"""

    def __init__(self, observations, report=None, baseline_established=False,
                 recommendation=None, transitions=None, capture=None):
        self.observations = observations
        self.report = report
        self.baseline_established = baseline_established
        self.recommendation = recommendation
        self.transitions = transitions or {}
        self.capture = capture

    @property
    def unauthorized_count(self):
        if not self.report:
            return 0
        return sum(len(hosts) for hosts in self.report.values())

    def as_dict(self):
        return {
            'timestamp': get_timestamp(),
            'baseline_established': self.baseline_established,
            'observations': self.observations,
            'report': self.report,
            'capture': self.capture,
        }


class DriftMonitor:
    """Runs one monitoring session: browse, then analyze"""

    def __init__(self, config, tracker=None):
        self.config = config
        self.aggregator = ObservationAggregator()
        self.handlers = EventHandlers(
            self.aggregator,
            suspicious_calls=config.suspicious_calls,
            obfuscation_limit=config.obfuscation_limit,
        )
        self._tracker = tracker

    @property
    def tracker(self):
        if self._tracker is None:
            self._tracker = GitHubIssueTracker.from_config(self.config)
        return self._tracker

    def browse(self, urls):
        """Capture a fresh session's observations"""
        self.aggregator.reset()
        capture = SiteCapture(self.handlers, ws_endpoint=self.config.browser_ws_endpoint)
        return capture.run(urls, self.config.page_timeout_ms)

    def analyze(self):
        """
        Compare observations to the baseline and update issues

        With no baseline (or an empty one) nothing is compared and the
        tracker is left alone; the observations are printed as a
        recommended starting baseline instead.

        Returns:
            MonitorResult
        """
        observations = self.aggregator.snapshot()
        baseline = load_baseline(self.config.baseline_file)

        print('\n-+-+-+-\n')
        logger.log('analysis complete')

        if baseline is None or not baseline.established:
            recommendation = recommend(observations, self.config.baseline_file,
                                       self.config.recommendation_file)
            return MonitorResult(observations, recommendation=recommendation)

        report = compare(observations, baseline)
        self._print_report(report)

        transitions = {}
        if self.config.tracker_configured:
            transitions = IssueLifecycleManager(self.tracker).process_report(report)
        else:
            logger.log('[github] no credentials configured, skipping issue updates')

        return MonitorResult(observations, report=report, baseline_established=True,
                             transitions=transitions)

    def run(self, urls):
        summary = self.browse(urls)
        if summary and summary.get('timed_out'):
            logger.warn(f"[browser] browsing timed out after visiting {len(summary.get('pages_visited', []))} "
                        f"of {len(urls)} page(s); analyzing partial data")
        result = self.analyze()
        result.capture = summary
        return result

    def _print_report(self, report):
        for name, hosts in report.items():
            category = Category.from_name(name)
            for host in hosts:
                logger.warn(f"{category.title}={host}")

            count = len(hosts)
            if count > 0:
                logger.warn(f"[{category.label}] {count} unauthorized "
                            f"{'host' if count == 1 else 'hosts'} observed")
            else:
                logger.log(f"[{category.label}] no unauthorized hosts observed")


def parse_cli_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Monitor a site for supply-chain drift from its authorized hosts',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Single page
  drift-monitor https://example.com/

  # Multi-page flow, visited in order
  drift-monitor https://shop.example.com/ https://shop.example.com/checkout

Environment:
  TARGET_URLS, PAGE_TIMEOUT, SUSPICIOUS_CALLS, OBFUSCATION_LIMIT_PERCENT,
  BASELINE_FILE, BROWSER_WS_ENDPOINT, GITHUB_TOKEN, GITHUB_REPOSITORY
        """
    )

    parser.add_argument('urls', nargs='*', help='Pages to visit (default: TARGET_URLS)')
    parser.add_argument('--timeout', type=int, help='Browsing timeout in milliseconds')
    parser.add_argument('--baseline', help='Authorized hosts file (default: authorized_hosts.json)')
    parser.add_argument('--report', help='Write the JSON report to this path')

    return parser.parse_args(argv)


def main(argv=None):
    """CLI entry point"""
    args = parse_cli_args(argv)

    try:
        config = MonitorConfig.from_env()
    except ConfigError as e:
        print(f"[✗] {e}")
        sys.exit(4)

    if args.timeout is not None:
        config.page_timeout_ms = args.timeout
    if args.baseline:
        config.baseline_file = args.baseline

    urls = args.urls or config.target_urls
    if not urls:
        print("[✗] No URLs given. Pass them as arguments or set TARGET_URLS.")
        sys.exit(4)

    monitor = DriftMonitor(config)
    try:
        result = monitor.run(urls)
    except BaselineError as e:
        print(f"[✗] {e}")
        sys.exit(4)

    if args.report:
        save_json(result.as_dict(), args.report)
        logger.log(f"report written to {args.report}")

    sys.exit(1 if result.unauthorized_count else 0)


if __name__ == "__main__":
    main()
