"""Signatures of server error pages that reveal injection or misconfiguration."""

from __future__ import annotations

import re
from functools import lru_cache

ERROR_MESSAGES_PLAIN_TEXT = (
    r"Microsoft OLE DB Provider for ODBC Drivers",
    r"java.io.FileNotFoundException:",
    r"Microsoft OLE DB Provider for SQL Server",
    r'<h1 class="t-exception-report">An unexpected application exception has occurred.</h1>',
    r"Incorrect syntax near ",
    r"undefined alias:",
    r'<abbr title="ErrorException">ErrorException</abbr>',
    r"<h1>Grails Runtime Exception</h1>",
    r"<pre><code>com.sun.facelets.FaceletException",
    r"<title>Error - org.apache.myfaces",
    r"com.google.gwt.http.client.RequestException",
    r"<title>Grails Runtime Exception</title>",
    r'onclick="toggle(\'full exception chain stacktrace',
    r"at org.apache.catalina",
    r"at org.apache.coyote.",
    r"at org.jboss.seam.",
    r"at org.apache.tomcat.",
    r"Struts has detected an unhandled exception:",
    r"DatabaseError:",
    r"SyntaxError: Unexpected token ",
    r"SyntaxError: Unexpected identifier",
    r"SyntaxError: Unexpected number",
    r"SyntaxError: Unexpected end of input",
    r"SQLite3::SQLException:",
    r"System.Data.SqlClient.SqlException:",
    r"ODBC Microsoft Access Driver",
    r"ODBC SQL Server Driver",
    r"supplied argument is not a valid MySQL result",
    r"You have an error in your SQL syntax",
    r"Incorrect column name",
    r'Can\'t find record in',
    r"Unknown table",
    r"Incorrect column specifier for column",
    r'Column count doesn\'t match value count at row',
    r"Unclosed quotation mark before the character string",
    r"Unclosed quotation mark",
    r"Invalid SQL:",
    r"ERROR: parser: parse error at or near",
    r"java.lang.NumberFormatException: For input string:",
    r"): encountered SQLException [",
    r"Unexpected end of command in statement [",
    r"[ODBC Informix driver][Informix]",
    r"[Microsoft][ODBC Microsoft Access 97 Driver]",
    r"[SQL Server Driver][SQL Server]Line 1: Incorrect syntax near",
    r"SQL command not properly ended",
    r"unexpected end of SQL command",
    r"Supplied argument is not a valid PostgreSQL result",
    r"internal error [IBM][CLI Driver][DB2/6000]",
    r"Query failed: ERROR: unterminated quoted string at or near",
    r"pg_fetch_row() expects parameter 1 to be resource, boolean given in",
    r"<pre>Internal Server Error</pre>",
    r"<title>Error: 500 Internal Server Error</title>",
    r"<pre>Traceback (most recent call last):",
    r"Traceback (most recent call last):",
    r"Error Occurred While Processing Request",
    r"A syntax error has occurred",
    r"ADODB.Field error",
    r"ASP.NET is configured to show verbose error messages",
    r"Active Server Pages error",
    r"An illegal character has been found in the statement",
    r'An unexpected token "END-OF-STATEMENT" was found',
    r"Disallowed Parent Path",
    r"Error Diagnostic Information",
    r"Error Message : Error loading required libraries",
    r"Error converting data type varchar to numeric",
    r"Microsoft SQL Native Client error",
    r"Microsoft VBScript runtime error",
    r"Fatal error",
    r"Invalid multibyte sequence in argument",
    r"Incorrect syntax near",
    r"Invalid Path Character",
    r"Invalid procedure call or argument",
    r"SqlException",
    r"JDBC Driver",
    r"JDBC Error",
    r"JDBC MySQL",
    r"JDBC Oracle",
    r"JDBC SQL",
    r"MySQL Driver",
    r"MySQL Error",
    r"MySQL ODBC",
    r"ODBC DB2",
    r"ODBC Driver",
    r"ODBC Error",
    r"ODBC Microsoft Access",
    r"ODBC Oracle",
    r"ODBC SQL",
    r"ODBC SQL Server",
    r"OLE/DB provider returned message",
    r"Oracle DB2",
    r"Oracle Driver",
    r"Oracle Error",
    r"Oracle ODBC",
    r"Syntax error in query expression",
    r"The error occurred in",
    r"Warning: Cannot modify header information - headers already sent",
    r"Warning: pg_connect(): Unable to connect to PostgreSQL server:",
    r"missing expression",
    r"server object error",
    r"supplied argument is not a valid MySQL result resource",
    r"PostgreSQL query failed",
    r"Must declare the scalar variable",
    r"Invalid column name",
    r"unterminated quoted string at or near",
    r"Error Occurred While Processing Request",
    r"System.Data.SqlClient.SqlException",
    r"MS.Internal.Xml.",
    r"Unknown error in XPath",
    r"org.apache.xpath.XPath",
    r"A closing bracket expected in",
    r"An operand in Union Expression does not produce a node-set",
    r"Cannot convert expression to a number",
    r"Document Axis does not allow any context Location Steps",
    r"Empty Path Expression",
    r"Empty Relative Location Path",
    r"Empty Union Expression",
    r"Expected node test or name specification after axis operator",
    r"Incompatible XPath key",
    r"Incorrect Variable Binding",
    r'error \'80004005\'',
    r"libxml2 library function failed",
    r"A document must contain exactly one root element.",
    r'<font face="Arial" size=2>Expression must evaluate to a node-set.',
    r'Expected token \']\'',
    r"javax.crypto.BadPaddingException: Given final block not properly padded",
    r"Given final block not properly padded",
    r"javax.crypto.BadPaddingException",
    r"Padding is invalid and cannot be removed.",
    r"padding byte out of range",
    r"supplied argument is not a valid ldap",
    r"javax.naming.NameNotFoundException",
    r"LDAPException",
    r"com.sun.jndi.ldap",
    r"Protocol error occurred",
    r"Size limit has exceeded",
    r"An inappropriate matching occurred",
    r"A constraint violation occurred",
    r"The syntax is invalid",
    r"Object does not exist",
    r"The distinguished name has an invalid syntax",
    r"The server does not handle directory requests",
    r"The alias is invalid",
    r"There was a naming violation",
    r"There was an object class violation",
    r"Results returned are too large",
    r"The search filter is incorrect",
    r"The search filter is invalid",
    r"The search filter cannot be recognized",
    r"Invalid DN syntax",
    r"unterminated quoted identifier at or near",
    r"syntax error at end of input",
    r"MongoCursorException",
    r"No Such Object",
    r"<title>Struts Problem Report</title>",
    r"<h1>An Error Occurred:</h1>",
    r"<title>Action Controller: Exception caught</title>",
    r"SQLite3::query(): Unable to prepare statement:",
    r"javax.servlet.ServletException",
    r"<b>SQL error: </b> no such column",
    r"<b> Source File: </b>",
    r"<b>Stack Trace:</b>",
    r"org.hibernate.exception.SQLGrammarException:",
    r"org.hibernate.QueryException",
    r"servlet.exception",
    r"<dt>Environment variables</dt>",
    r" - Generated by Mojarra/Facelets",
    r"You're seeing this error because you have ",
    r"PDOStatement::execute():",
    r"You are seeing this page because development mode is enabled.  Development mode, or devMode, enables extra",
)

ERROR_MESSAGES_REGEXES = (
    r"(Incorrect\ssyntax\snear\s'[^']*')",
    r"""<th\salign='left'\sbgcolor='#[a-zA-Z0-9]+'\scolspan="[a-zA-Z0-9]+"><span\sstyle='background-color:\s#[a-zA-Z0-9]+;\scolor:\s#[a-zA-Z0-9]+;\sfont-size:\sx-large;'>\(\s\!\s\)<\/span>\s+(.*?on\s+line\s<i>\d+<\/i>)<\/th>""",
    r"(pg_query\(\)[:]*\squery\sfailed:\serror:\s)",
    r"('[^']*'\sis\snull\sor\snot\san\sobject)",
    r"(Syntax error: Missing operand after '[^']*' operator)",
    r"(ORA-\d{4,5}:\s)",
    r"(Microsoft\sJET\sDatabase\sEngine\s\([^\)]*\)<br>Syntax\serror(.*)\sin\squery\sexpression\s'.*\.<br><b>.*,\sline\s\d+<\/b><br>)",
    r"(<h2>\s<i>Syntax\serror\s(\([^\)]*\))?(in\sstring)?\sin\squery\sexpression\s'[^\.]*\.<\/i>\s<\/h2><\/span>)",
    r"""(<font\sface=\"Arial\"\ssize=2>Syntax\serror\s(.*)?in\squery\sexpression\s'(.*)\.<\/font>)""",
    r"(<b>Warning<\/b>:\s\spg_exec\(\)\s\[\<a\shref='function.pg\-exec\'\>function\.pg-exec\<\/a>\]\:\sQuery failed:\sERROR:\s\ssyntax error at or near \&quot\;\\\&quot; at character \d+ in\s<b>.*<\/b>)",
    r"(System\.Data\.OleDb\..*)",
    r"(System\.InvalidOperationException.*)",
    r"(Data type mismatch in criteria expression|Could not update; currently locked by user '.*?' on machine '.*?')",
    r'(<font style="COLOR: black; FONT: 8pt\/11pt verdana">\s+(\[Macromedia\]\[SQLServer\sJDBC\sDriver\]\[SQLServer\]|Syntax\serror\sin\sstring\sin\squery\sexpression\s))',
    r"(Unclosed\squotation\smark\safter\sthe\scharacter\sstring\s'[^']*')",
    r"(<b>Warning<\/b>:\s+(?:mysql_fetch_array|mysql_fetch_row|mysql_fetch_object|mysql_fetch_field|mysql_fetch_lengths|mysql_num_rows)\(\): supplied argument is not a valid MySQL result resource in <b>.*?<\/b> on line <b>.*?<\/b>)",
    r"(You have an error in your SQL syntax; check the manual that corresponds to your MySQL server version for the right syntax to use near '[^']*' at line \d)",
    r'(Query\sfailed\:\sERROR\:\scolumn\s"[^"]*"\sdoes\snot\sexist\sLINE\s\d)',
    r"(Query\sfailed\:\sERROR\:\s+unterminated quoted string at or near)",
    r"The Error Occurred in <b>(.*): line.*<\/b><br>",
    r"The error occurred while processing.*Template: (.*) <br>.",
    r"The error occurred while processing.*in the template file (.*)\.<\/p><br>",
    r"<title>Invalid\sfile\sname\sfor\smonitoring:\s'([^']*)'\.\sFile\snames\sfor\smonitoring\smust\shave\sabsolute\spaths\,\sand\sno\swildcards\.<\/title>",
    r"(<b>(Warning|Fatal\serror|Parse\serror)<\/b>:\s+.*?\sin\s<b>.*?<\/b>\son\sline\s<b>\d*?<\/b><br\s\/>)",
    r"(<\/span>\s(Warning|Fatal\serror|Parse\serror):\s+.*?\sin\s.*?\son\sline\s<i>\d*?<\/i>)",
    r"((?:Unknown database '.*?')|(?:No database selected)|(?:Table '.*?' doesn't exist)|(?:You have an error in your SQL syntax; check the manual that corresponds to your MySQL server version for the right syntax to use near '.*?' at line .*?))",
    r"(Exception report.*message.*description.*exception.*note.*)",
    r"(<head><title>JRun Servlet Error<\/title><\/head>)",
    r"(<h1>Servlet\sError:\s\w+?<\/h1>)",
    r"(Servlet\sError<\/title>)",
    r"(<b>\sException\sDetails:\s<\/b>System\.Xml\.XPath\.XPathException:\s'.*'\shas\san\sinvalid\stoken\.<br><br>)",
    r"(<b>\sException\sDetails:\s<\/b>System\.Xml\.XPath\.XPathException:\sThis\sis\san\sunclosed\sstring\.<br><br>)",
    r"(System.Xml.XPath.XPathException\:)",
    r"(<b>Fatal error<\/b>:.*: Failed opening required '.*').*",
    r"(<b>Warning<\/b>:.*: Failed opening '.*') for inclusion.*",
    r"(org.apache.jasper.JasperException: .*? File .*? not found)",
    r"(Failed opening '.*' for inclusion)",
    r"(Unknown column '[^']+' in '\w+ clause')",
    r"(IPWorksASP\.LDAP.*800a4f70.*\[335\]\s\(no description\savailable\))",
    r"(<span><H1>Server Error in '.*?' Application.*<h2>\s<i>The.*search filter is invalid\.<\/i>)",
    r"\d{4}\s\d{2}:\d{2}:\d{2} - Generated by MyFaces - for information on disabling or modifying this error-page, see",
    r"(\s+(at)?\s(org|net|java|com|javax|ruby|sun|hudson|winstone|jpp)\.[\w\.\$]+\(.*?:\d+\)){5,}",
    r"(<title>.*?Exception caught<\/title>)",
    r'(Traceback \(most recent call last\):\s+File\s")',
    r"(Microsoft\sJET\sDatabase\sEngine\s\([^\)]*\)<br>Syntax\serror([\s\S]*)\sin\squery\sexpression\s'[\s\S]*\.<br><b>[\s\S]*,\sline\s\d+<\/b><br>)",
    r"""(<font\sface=\"Arial\"\ssize=2>Syntax\serror\s([\s\S]*)?in\squery\sexpression\s'([\s\S]*)\.<\/font>)""",
    r"(<b>Warning<\/b>:\s\spg_exec\(\)\s\[\<a\shref='function.pg\-exec\'\>function\.pg-exec\<\/a>\]\:\sQuery failed:\sERROR:\s\ssyntax error at or near \&quot\;\\\&quot; at character \d+ in\s<b>[\s\S]*<\/b>)",
    r"(System\.Data\.OleDb\.OleDbException\:\sSyntax\serror\s\([^)]*?\)\sin\squery\sexpression\s[\s\S]*)",
    r"(System\.Data\.OleDb\.OleDbException\:\sSyntax\serror\sin\sstring\sin\squery\sexpression\s)",
    r"(Data type mismatch in criteria expression|Could not update; currently locked by user '[\s\S]*?' on machine '[\s\S]*?')",
    r"(<b>Warning<\/b>:\s+(?:mysql_fetch_array|mysql_fetch_row|mysql_fetch_object|mysql_fetch_field|mysql_fetch_lengths|mysql_num_rows)\(\): supplied argument is not a valid MySQL result resource in <b>[\s\S]*?<\/b> on line <b>[\s\S]*?<\/b>)",
    r"The Error Occurred in <b>([\s\S]*): line[\s\S]*<\/b><br>",
    r"The error occurred while processing[\s\S]*Template: ([\s\S]*) <br>.",
    r"The error occurred while processing[\s\S]*in the template file ([\s\S]*)\.<\/p><br>",
    r"(<b>(Warning|Fatal\serror|Parse\serror)<\/b>:\s+[\s\S]*?\sin\s<b>[\s\S]*?<\/b>\son\sline\s<b>\d*?<\/b><br\s\/>)",
    r"((?:Unknown database '[\s\S]*?')|(?:No database selected)|(?:Table '[\s\S]*?' doesn't exist)|(?:You have an error in your SQL syntax; check the manual that corresponds to your MySQL server version for the right syntax to use near '[\s\S]*?' at line [\s\S]*?))",
    r"(Exception report[\s\S]*message[\s\S]*description[\s\S]*exception[\s\S]*note[\s\S]*)",
    r"((Warning|Fatal\serror|Parse\serror):\s+[\s\S]*\([^\)]*\)\:\s[\s\S]*?\sin\s[\s\S]*?\son\sline\s\d+)",
    r"(\[IBM\]\[CLI Driver\]\[DB2\/.*?\])",
    r"(?i)(SQL[\s\S]error[\s\S]*)",
    r"(\s+at\s\w+\.[\s\S]*?\(\w+\.java\:\d+\)\n){3,}",
    r"Microsoft VBScript (?:runtime|compilation)\s<\/font>\s<font.*?>error\s'[a-f0-9]+'<\/font>",
)


@lru_cache(maxsize=1)
def error_message_patterns() -> tuple[re.Pattern[str], ...]:
    """The error-page regular expressions, compiled once."""
    return tuple(re.compile(pattern, re.ASCII) for pattern in ERROR_MESSAGES_REGEXES)


def find_error_messages(text: str) -> list[str]:
    """Error signatures found in ``text``: plain matches first, then regex matches.

    Each distinct finding is reported once, in the order it was detected.
    """
    found = [message for message in ERROR_MESSAGES_PLAIN_TEXT if message in text]
    for pattern in error_message_patterns():
        match = pattern.search(text)
        if match is not None:
            found.append(match.group(0))
    return list(dict.fromkeys(found))