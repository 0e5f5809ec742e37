import argparse
import glob
import json
import logging
import os

from colorama import Style, init

from .__version__ import __version__
from .contract import ContractError, load_contract, validate_contract
from .result import CaptureResult

log = logging.getLogger(__name__)

parser = argparse.ArgumentParser(prog='yakusoku', description='Inspect and validate consumer contract files')

parser.add_argument('-V', '--version', default=False, action='version', version=f'%(prog)s {__version__}')

subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
subparsers.required = True

list_parser = subparsers.add_parser('list', help='list the contract files in a directory')
list_parser.add_argument('--pact-dir', default='.',
                         help='directory containing contract files (default: current directory)')
list_parser.add_argument('--pattern', default='*.json',
                         help='glob pattern used to pick contract files (default: *.json)')
list_parser.add_argument('--json', default=False, action='store_true',
                         help='output in JSON format')

show_parser = subparsers.add_parser('show', help='show the details of a contract file')
show_parser.add_argument('pact_file', metavar='PACT_FILE', help='path to the contract file')
show_parser.add_argument('--json', default=False, action='store_true',
                         help='output in JSON format')

validate_parser = subparsers.add_parser('validate', help='check contract files for structural problems')
validate_parser.add_argument('pact_files', metavar='PACT_FILE', nargs='+', help='path to a contract file')
validate_parser.add_argument('-v', '--verbose', default=False, action='store_true',
                             help='output more information about the validation')
validate_parser.add_argument('-q', '--quiet', default=False, action='store_true',
                             help='output less information about the validation')


def main(argv=None):
    init(autoreset=True)
    args = parser.parse_args(argv)
    return COMMANDS[args.command](args)


def list_contracts(args):
    if not os.path.isdir(args.pact_dir):
        print(f'Not a directory: {args.pact_dir}')
        return 1
    contracts = []
    for filename in sorted(glob.glob(os.path.join(args.pact_dir, args.pattern))):
        try:
            contract = load_contract(filename)
        except (OSError, ContractError) as e:
            log.debug(f'Skipping {filename}: {e}')
            continue
        contracts.append(dict(
            file=os.path.basename(filename),
            consumer=(contract.get('consumer') or {}).get('name'),
            provider=(contract.get('provider') or {}).get('name'),
        ))

    if args.json:
        print(json.dumps(contracts, indent=2))
    elif not contracts:
        print('No contracts found')
    else:
        print('Contracts:')
        for info in contracts:
            print(f'  {info["file"]}')
            print(f'    Consumer: {info["consumer"]}')
            print(f'    Provider: {info["provider"]}')
    return 0


def show_contract(args):
    try:
        contract = load_contract(args.pact_file)
    except (OSError, ContractError) as e:
        print(f'Unable to read {args.pact_file}: {e}')
        return 1

    if args.json:
        print(json.dumps(contract, indent=2))
        return 0

    consumer = (contract.get('consumer') or {}).get('name')
    provider = (contract.get('provider') or {}).get('name')
    interactions = contract.get('interactions') or []
    print(f'{Style.BRIGHT}Contract: {consumer} -> {provider}')
    print()
    print(f'Consumer: {consumer}')
    print(f'Provider: {provider}')
    print()
    print(f'Interactions ({len(interactions)}):')
    for number, interaction in enumerate(interactions, 1):
        request = interaction.get('request', {})
        response = interaction.get('response', {})
        print()
        print(f'  [{number}] {interaction.get("description")}')
        if interaction.get('providerState'):
            print(f'      Provider State: {interaction["providerState"]}')
        print('      Request:')
        print(f'        Method: {request.get("method")}')
        print(f'        Path: {request.get("path")}')
        if request.get('query'):
            print(f'        Query: {json.dumps(request["query"])}')
        print_headers(request.get('headers'))
        if 'body' in request:
            print(f'        Body: {json.dumps(request["body"])}')
        print('      Response:')
        print(f'        Status: {response.get("status")}')
        print_headers(response.get('headers'))
        if 'body' in response:
            print(f'        Body: {json.dumps(response["body"])}')
    return 0


def print_headers(headers):
    if not headers:
        return
    print('        Headers:')
    for name, value in headers.items():
        print(f'          {name}: {value}')


def validate_contracts(args):
    result_log_level = get_log_level(args)
    success = True
    for filename in args.pact_files:
        result = CaptureResult(level=result_log_level)
        result.start(filename)
        try:
            contract = load_contract(filename)
        except (OSError, ContractError) as e:
            result.fail(f'Unable to read contract: {e}')
        else:
            validate_contract(contract, result)
        result.end()
        success = result.success and success
    return int(not success)


def get_log_level(args):
    if args.quiet:
        result_log_level = logging.ERROR
    elif args.verbose:
        result_log_level = logging.DEBUG
    else:
        result_log_level = logging.WARNING
    return result_log_level


COMMANDS = {
    'list': list_contracts,
    'show': show_contract,
    'validate': validate_contracts,
}


if __name__ == '__main__':
    import sys
    sys.exit(main())
