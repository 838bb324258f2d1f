"""Walking directory trees and running matchers over their entries."""