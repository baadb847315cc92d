from setuptools import setup, find_packages

setup(name = 'fdstick',
      python_requires = '>=3.8',
      version = '1.0',
      install_requires = [
          'crcmod',
          'bitarray>=3'
      ],
      extras_require = {
          'test': [ 'pytest' ]
      },
      packages = find_packages('src'),
      package_dir = { '': 'src' },
      entry_points= {
          'console_scripts': ['fds=fdstick.cli:main']
      }
)
