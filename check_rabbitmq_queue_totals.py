#!/usr/bin/env python3
#  vim:ts=4:sts=4:sw=4:et
#
#  Author: Hari Sekhon
#  Date: 2026-10-16 10:12:41 +0100 (Fri, 16 Oct 2026)
#
#  https://github.com/harisekhon/nagios-plugins
#
#  License: see accompanying Hari Sekhon LICENSE file
#
#  If you're using my code you're welcome to connect with me on LinkedIn
#  and optionally send me feedback to help steer this or other code I publish
#
#  https://www.linkedin.com/in/harisekhon
#

"""

Nagios Plugin to check RabbitMQ cluster-wide queue totals via the Management REST API

Checks the number of ready and unacknowledged messages from /api/overview and outputs one line per counter:

    <STATUS> <count> messages ready
    <STATUS> <count> messages unacknowledged

Thresholds are comma separated pairs of '<ready>,<unacknowledged>' and are inclusive lower bounds,
critical is checked before warning

Multiple hosts may be given as a comma separated list, they are checked in order and the first host that fails
aborts the remaining checks

Counters missing from the API response are treated as zero

Requires the management plugin to be loaded.

"""

import json
import logging
import os
import sys
import traceback
from collections import namedtuple
from optparse import OptionParser
try:
    import requests
    from requests.auth import HTTPBasicAuth
except ImportError:
    print(traceback.format_exc(), end='')
    sys.exit(4)
try:
    from harisekhon.utils import log, log_option, getenvs, isInt, isDict, jsonpp, support_msg_api
    from harisekhon.utils import validate_host, validate_port, validate_user, validate_password
    from harisekhon.utils import CriticalError, UnknownError, InvalidOptionException, ERRORS
except ImportError:
    print(traceback.format_exc(), end='')
    sys.exit(4)

__author__ = 'Hari Sekhon'
__version__ = '0.1'

prog = os.path.basename(sys.argv[0])

Config = namedtuple('Config', 'hosts port user password ssl warning critical')
ThresholdPair = namedtuple('ThresholdPair', 'ready unacknowledged')
QueueSnapshot = namedtuple('QueueSnapshot', 'messages_ready messages_unacknowledged')

LABELS = ('messages ready', 'messages unacknowledged')


class ConfigError(UnknownError):
    pass


class MalformedLimits(UnknownError):
    pass


class NonNumericLimit(UnknownError):
    pass


class TransportError(CriticalError):
    pass


class DecodeError(UnknownError):
    pass


def parse_limits(limits, name='limits'):
    """Returns a ThresholdPair from a '<ready>,<unacknowledged>' string"""
    parts = str(limits).split(',')
    if len(parts) != 2:
        raise MalformedLimits("a list of two integers is required for {0}, got '{1}'".format(name, limits))
    for _ in parts:
        # optional leading sign, either '+' or '-'
        if not isInt(_[1:] if _.startswith('+') else _, allow_negative=not _.startswith('+')):
            raise NonNumericLimit("non-integer value '{0}' given for {1} '{2}'".format(_, name, limits))
    return ThresholdPair(int(parts[0]), int(parts[1]))


def split_hosts(value):
    return value.split(',')


def _get_counter(queue_totals, key):
    # missing or null counters default to zero
    value = queue_totals.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError("non-integer '{0}' returned by RabbitMQ (got '{1}'). {2}"\
                          .format(key, value, support_msg_api()))
    return value


def parse_overview(content):
    """Decodes an /api/overview response body into a QueueSnapshot"""
    try:
        json_data = json.loads(content)
    except ValueError as _:
        raise DecodeError('invalid json returned by RabbitMQ: {0}. {1}'.format(_, support_msg_api())) from _
    if log.isEnabledFor(logging.DEBUG):
        log.debug('\n%s\n%s\n%s', '='*80, jsonpp(json_data), '='*80)
    if json_data is None:
        json_data = {}
    if not isDict(json_data):
        raise DecodeError("non-dict returned by RabbitMQ (got type '{0}'). {1}"\
                          .format(type(json_data).__name__, support_msg_api()))
    queue_totals = json_data.get('queue_totals')
    if queue_totals is None:
        queue_totals = {}
    if not isDict(queue_totals):
        raise DecodeError("non-dict returned for 'queue_totals' by RabbitMQ (got type '{0}'). {1}"\
                          .format(type(queue_totals).__name__, support_msg_api()))
    return QueueSnapshot(_get_counter(queue_totals, 'messages_ready'),
                         _get_counter(queue_totals, 'messages_unacknowledged'))


def fetch_queue_totals(config, host):
    protocol = 'http'
    if config.ssl:
        protocol = 'https'
    url = '{protocol}://{host}:{port}/api/overview'.format(protocol=protocol, host=host, port=config.port)
    log.debug('GET %s', url)
    try:
        with requests.get(url, auth=HTTPBasicAuth(config.user, config.password)) as req:
            log.debug("response: %s %s", req.status_code, req.reason)
            content = req.content
            status_code = req.status_code
            reason = req.reason
    except requests.exceptions.RequestException as _:
        errhint = ''
        if 'BadStatusLine' in str(_):
            errhint = ' (possibly connecting to an SSL secured port without using --secure?)'
        elif config.ssl and 'unknown protocol' in str(_):
            errhint = ' (possibly connecting to a plain HTTP port with the -s / --secure switch enabled?)'
        raise TransportError('{0}: {1}{2}'.format(host, _, errhint)) from _
    if status_code != 200:
        raise TransportError('{0}: {1} {2}'.format(host, status_code, reason))
    return parse_overview(content)


def classify(value, warning, critical):
    # critical takes precedence over warning
    if value >= critical:
        return 'CRITICAL'
    elif value >= warning:
        return 'WARNING'
    return 'OK'


def check_queue_totals(snapshot, warning, critical):
    for index, label in enumerate(LABELS):
        value = snapshot[index]
        print('{0} {1} {2}'.format(classify(value, warning[index], critical[index]), value, label))


class _OptionParser(OptionParser):

    def error(self, msg):
        raise ConfigError(msg)


class CheckRabbitMQQueueTotals(object):

    def __init__(self):
        self.name = 'RabbitMQ'
        self.default_host = 'localhost'
        self.default_port = 15672
        self.default_user = 'guest'
        self.default_password = 'guest'
        self.default_warning = '10000,10000'
        self.default_critical = '50000,50000'
        self.parser = _OptionParser(prog=prog, add_help_option=False)
        self.parser.version = '{0} version {1}'.format(prog, __version__)
        self.config = None
        self.add_options()

    def add_options(self):
        # -h is taken by --host
        self.parser.add_option('--help', action='help', help='Show this help message and exit')
        self.parser.add_option('-h', '--host', default=getenvs('RABBITMQ_HOST', default=self.default_host),
                               help='{0} host, for clusters give all the hostnames as a comma separated list '\
                                    .format(self.name) + \
                                    '($RABBITMQ_HOST, default: {0})'.format(self.default_host))
        self.parser.add_option('-P', '--port', default=getenvs('RABBITMQ_PORT', default=str(self.default_port)),
                               help='{0} management API port ($RABBITMQ_PORT, default: {1})'\
                                    .format(self.name, self.default_port))
        self.parser.add_option('-u', '--username', default=getenvs('RABBITMQ_USER', default=self.default_user),
                               help='{0} management API user ($RABBITMQ_USER, default: {1})'\
                                    .format(self.name, self.default_user))
        self.parser.add_option('-p', '--password',
                               default=getenvs('RABBITMQ_PASSWORD', default=self.default_password),
                               help='{0} management API password ($RABBITMQ_PASSWORD, default: {1})'\
                                    .format(self.name, self.default_password))
        self.parser.add_option('-w', '--warning', default=self.default_warning,
                               help="Warning thresholds as '<ready>,<unacknowledged>' (default: {0})"\
                                    .format(self.default_warning))
        self.parser.add_option('-c', '--critical', default=self.default_critical,
                               help="Critical thresholds as '<ready>,<unacknowledged>' (default: {0})"\
                                    .format(self.default_critical))
        self.parser.add_option('-s', '--secure', action='store_true', default=False,
                               help='Use https to access the management API')
        self.parser.add_option('-v', '--verbose', action='count', default=0,
                               help='Verbose mode (-v for info, -vv for debug)')
        self.parser.add_option('-D', '--debug', action='store_true', default=False, help='Debug mode')
        self.parser.add_option('-V', '--version', action='version', help='Show version and exit')

    def process_options(self, args=None):
        options, args = self.parser.parse_args(args)
        if args:
            raise ConfigError('invalid non-switch arguments supplied on command line: {0}'.format(' '.join(args)))
        if options.debug or options.verbose > 1:
            log.setLevel(logging.DEBUG)
        elif options.verbose == 1:
            log.setLevel(logging.INFO)
        hosts = split_hosts(options.host)
        try:
            for host in hosts:
                validate_host(host)
            validate_port(options.port)
            validate_user(options.username)
            validate_password(options.password)
        except InvalidOptionException as _:
            raise ConfigError(_)
        log_option('ssl', options.secure)
        log_option('warning', options.warning)
        log_option('critical', options.critical)
        self.config = Config(hosts=tuple(hosts),
                             port=options.port,
                             user=options.username,
                             password=options.password,
                             ssl=options.secure,
                             warning=options.warning,
                             critical=options.critical)
        return self.config

    def run(self):
        warning = parse_limits(self.config.warning, name='--warning')
        critical = parse_limits(self.config.critical, name='--critical')
        # the first failing host aborts the remaining hosts
        for host in self.config.hosts:
            log.info('querying %s host %s', self.name, host)
            snapshot = fetch_queue_totals(self.config, host)
            check_queue_totals(snapshot, warning, critical)

    def main(self, args=None):
        try:
            self.process_options(args)
        except ConfigError as _:
            log.error('%s', _)
            return ERRORS['UNKNOWN']
        try:
            self.run()
        except CriticalError as _:
            log.error('%s', _)
            return ERRORS['CRITICAL']
        except UnknownError as _:
            log.error('%s', _)
            return ERRORS['UNKNOWN']
        return ERRORS['OK']


def main():
    sys.exit(CheckRabbitMQQueueTotals().main())


if __name__ == '__main__':
    main()
